"""Status color map."""

from helm_steward.models.release import ReleaseStatus

STATUS_COLORS: dict[ReleaseStatus, str] = {
    ReleaseStatus.DEPLOYED: "green",
    ReleaseStatus.FAILED: "red bold",
    ReleaseStatus.SUPERSEDED: "dim",
    ReleaseStatus.PENDING_INSTALL: "yellow",
    ReleaseStatus.PENDING_UPGRADE: "yellow",
    ReleaseStatus.PENDING_ROLLBACK: "yellow",
    ReleaseStatus.UNINSTALLING: "magenta",
    ReleaseStatus.UNINSTALLED: "dim",
    ReleaseStatus.UNKNOWN: "red",
}


def styled_status(status: ReleaseStatus) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{status.value}[/{color}]"
