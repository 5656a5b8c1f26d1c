import click

from school_admin.models import User
from school_admin.repository import SchoolRepository


def list_notifications(repo: SchoolRepository, user: User, unread_only: bool = False) -> None:
    if unread_only:
        notifications = repo.get_unread_notifications(user.id)
    else:
        notifications = repo.get_notifications_by_user(user.id)

    if not notifications:
        click.secho("No notifications.", fg="yellow")
        return

    for notification in sorted(notifications, key=lambda n: n.created_at, reverse=True):
        marker = " " if notification.is_read else "*"
        click.echo(
            f"{marker} [{notification.id}] {notification.created_at.strftime('%Y-%m-%d')} "
            f"{notification.title} ({notification.type})"
        )
        click.echo(f"    {notification.message}")


def read_notification(repo: SchoolRepository, user: User, notification_id: str) -> bool:
    notification = repo.get_notification_by_id(notification_id)
    if notification is None or notification.recipient_id != user.id:
        click.secho(f"Notification {notification_id} not found", fg="red")
        return False
    repo.mark_notification_as_read(notification_id)
    click.secho(f"Marked {notification_id} as read", fg="green")
    return True
