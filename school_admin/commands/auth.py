import click

from school_admin.auth.service import AuthService


def login_user(auth: AuthService, email: str, password: str) -> bool:
    result = auth.login(email, password)
    if not result.ok or result.user is None:
        click.secho(result.error or "Login failed", fg="red")
        return False
    click.secho(f"Logged in as {result.user.full_name} ({result.user.role})", fg="green")
    return True


def logout_user(auth: AuthService) -> None:
    auth.logout()
    click.echo("Logged out.")


def show_current_user(auth: AuthService) -> None:
    user = auth.get_current_user()
    if user is None:
        click.secho("Not logged in.", fg="yellow")
        return
    click.echo(f"{user.full_name} <{user.email}>")
    click.echo(f"Role: {user.role}")
    click.echo(f"User ID: {user.id}")
