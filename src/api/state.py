from dataclasses import dataclass, field
from typing import Optional

from api.backend import BackendAPI
from integration.client_ready import CalendarClientGate
from storage.google_auth import GoogleAuthStore
from wizard.session import WizardSession


@dataclass
class AppState:
    """Everything the routes share, attached to `app.state` at creation.

    One instance per application; routes reach it through the dependencies
    in api.dependencies rather than module globals.
    """

    session: WizardSession
    auth_store: Optional[GoogleAuthStore] = None
    calendar_gate: CalendarClientGate = field(default_factory=CalendarClientGate)
    backend: BackendAPI = field(default_factory=BackendAPI)
