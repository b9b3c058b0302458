import questionary
from rich.markup import escape

from dodgem.config import EMAIL_RE, NON_WHITESPACE_RE, CredentialStore, Credentials, validate_credentials
from dodgem.errors import ConfigError, CredentialInputError
from dodgem.logs import console


def _check(pattern, message: str):
    return lambda value: True if pattern.match(value or "") else message


async def _ask_credentials() -> Credentials:
    answers = {}
    questions = [
        ("username", questionary.text(
            "Username",
            validate=_check(NON_WHITESPACE_RE, "Please enter a valid username"),
        )),
        ("email_address", questionary.text(
            "Email Address",
            validate=_check(EMAIL_RE, "Please enter a valid email address"),
        )),
        ("password", questionary.password(
            "Password",
            validate=_check(NON_WHITESPACE_RE, "Please enter a valid password"),
        )),
    ]

    for key, question in questions:
        value = await question.ask_async()
        if value is None:
            raise CredentialInputError(f"No {key.replace('_', ' ')} entered")
        answers[key] = value

    creds = Credentials(**answers)
    try:
        validate_credentials(creds)
    except ConfigError as e:
        raise CredentialInputError(str(e)) from e
    return creds


async def run_login(store: CredentialStore) -> Credentials | None:
    """Ask for Rocket League Garage credentials and save them."""
    console.print()
    console.print("  [blue]i[/] Please enter login credentials for Rocket League Garage")
    console.print()

    try:
        creds = await _ask_credentials()
    except CredentialInputError:
        console.print("\n\n  [red]Login aborted[/]")
        return None

    # Credentials are saved as entered; they are first checked against the site on  dodgem bump
    with console.status(f"[dim]Saving credentials for: {escape(creds.email_address)}...[/]", spinner="dots"):
        store.set(creds)
    console.print(f"  [green]✓[/] Credentials saved for: [blue]{escape(creds.email_address)}[/]")
    return creds
