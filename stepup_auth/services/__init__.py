from flask import current_app

from .challenge_manager import ChallengeManager
from .challenge_store import build_store
from .credentials import CredentialStore
from .login import LoginController
from .sessions import SessionIssuer
from ..utils.mailer import EmailDeliveryGateway


def init_services(app) -> None:
    credentials = CredentialStore()
    store = build_store(app.config["CHALLENGE_STORE"])
    manager = ChallengeManager.from_config(app.config, store, EmailDeliveryGateway(credentials))
    sessions = SessionIssuer(app.config["SESSION_TTL"], app.config["SESSION_REMEMBER_ME_TTL"])

    app.extensions["challenge_manager"] = manager
    app.extensions["login_controller"] = LoginController(credentials, manager, sessions)


def get_login_controller() -> LoginController:
    return current_app.extensions["login_controller"]


def get_challenge_manager() -> ChallengeManager:
    return current_app.extensions["challenge_manager"]
