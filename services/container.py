"""Per-application wiring of stores and services."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from services.auth_service import AuthService
from services.mailer import Mailer
from services.post_service import PostService
from services.tokens import EMAIL_VERIFICATION, PASSWORD_RESET, SESSION, TokenService
from services.user_service import UserService
from storage.abstract_storage import (
    AbstractPostStore,
    AbstractResetTokenStore,
    AbstractUserStore,
)
from storage.sql_storage import SQLPostStore, SQLResetTokenStore, SQLUserStore

EXTENSION_KEY = "blog_services"


@dataclass
class Services:
    user_store: AbstractUserStore
    reset_token_store: AbstractResetTokenStore
    post_store: AbstractPostStore
    tokens: TokenService
    mailer: Mailer
    auth: AuthService
    posts: PostService
    users: UserService


def build_services(app: Flask) -> Services:
    """Create the services for ``app`` and register them on its extensions."""

    config = app.config
    user_store = SQLUserStore()
    reset_token_store = SQLResetTokenStore()
    post_store = SQLPostStore()
    tokens = TokenService(
        {
            SESSION: config["SESSION_TOKEN_TTL"],
            EMAIL_VERIFICATION: config["VERIFY_TOKEN_TTL"],
            PASSWORD_RESET: config["RESET_TOKEN_TTL"],
        }
    )
    mailer = Mailer.from_config(config)

    services = Services(
        user_store=user_store,
        reset_token_store=reset_token_store,
        post_store=post_store,
        tokens=tokens,
        mailer=mailer,
        auth=AuthService(
            user_store,
            reset_token_store,
            tokens,
            mailer,
            frontend_url=config["FRONTEND_URL"],
            reset_password_url=config["RESET_PASSWORD_URL"],
            reset_token_ttl=config["RESET_TOKEN_TTL"],
        ),
        posts=PostService(post_store, user_store),
        users=UserService(user_store),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
