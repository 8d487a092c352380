"""
Registration Form - collect, check and submit one registration
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.prompt import Prompt

from client.api import ApiError, RegistrationApi
from client.validation import validate_registration_form


@dataclass
class SubmitResult:
    """Outcome of one submit attempt"""
    success: bool
    registration: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    field_errors: Dict[str, str] = field(default_factory=dict)


class RegistrationForm:
    """
    Client-side validation plus submission.

    Local problems never reach the server; server failures are reported
    with the server's own message.
    """

    def __init__(self, api: RegistrationApi, catalog: Optional[Dict[str, List[str]]] = None):
        self.api = api
        self.catalog: Dict[str, List[str]] = catalog or {}

    async def load_catalog(self) -> Dict[str, List[str]]:
        self.catalog = await self.api.get_catalog()
        return self.catalog

    @property
    def services(self) -> List[str]:
        return list(self.catalog.keys())

    def courses_for(self, service: str) -> List[str]:
        return list(self.catalog.get(service, []))

    async def submit(self, data: Dict[str, Any]) -> SubmitResult:
        field_errors = validate_registration_form(data)
        if field_errors:
            return SubmitResult(
                success=False,
                message="Please fix the highlighted fields",
                field_errors=field_errors,
            )

        try:
            registration = await self.api.create_registration(data)
        except ApiError as e:
            server_fields = {err["field"]: err["message"] for err in e.errors if "field" in err}
            return SubmitResult(success=False, message=e.message, field_errors=server_fields)

        return SubmitResult(
            success=True,
            registration=registration,
            message="Registration successful!",
        )


def _choose(console: Console, label: str, options: List[str]) -> str:
    if not options:
        return Prompt.ask(label, console=console)
    for index, option in enumerate(options, start=1):
        console.print(f"  [cyan]{index}[/cyan]. {option}")
    choice = Prompt.ask(label, choices=[str(i) for i in range(1, len(options) + 1)], console=console)
    return options[int(choice) - 1]


def prompt_for_registration(console: Console, form: RegistrationForm) -> Dict[str, Any]:
    """Interactively ask for every field"""
    data: Dict[str, Any] = {
        "fullName": Prompt.ask("Full name", console=console),
        "email": Prompt.ask("Email", console=console),
        "phone": Prompt.ask("Phone (10 digits)", console=console),
        "qualification": Prompt.ask("Qualification", default="", console=console),
        "passingYear": Prompt.ask("Passing year", default="", console=console),
    }
    data["service"] = _choose(console, "Service", form.services)
    data["course"] = _choose(console, "Course", form.courses_for(data["service"]))
    data["message"] = Prompt.ask("Message", default="", console=console)
    return {key: value for key, value in data.items() if value != ""}
