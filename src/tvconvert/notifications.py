"""
Desktop notification at the end of a batch.

Conversions can run for hours after the last track prompt was answered, so
the operator is told when the batch is over. The notice goes through
notify-send (libnotify) when it is installed, and through plyer otherwise.
"""

import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from tvconvert.config import Settings
from tvconvert.ui.legacy_ui import fmt_hms

APP_NAME = "tvconvert"
EXPIRE_SECONDS = 10


@dataclass(frozen=True)
class BatchNotice:
    """What to tell the operator about a finished batch."""

    title: str
    message: str
    failed: bool

    @property
    def urgency(self) -> str:
        return "critical" if self.failed else "normal"

    @property
    def icon(self) -> str:
        return "dialog-error" if self.failed else "dialog-information"


def batch_notice(converted: int, failed: int, elapsed: float) -> BatchNotice:
    total_time = fmt_hms(elapsed)
    if failed:
        message = f"{failed} failed ({total_time})"
        if converted:
            message = f"{converted} converted, {message}"
        return BatchNotice(f"{APP_NAME} - Conversion Failed", message, failed=True)

    noun = "movie" if converted == 1 else "movies"
    message = f"Successfully converted {converted} {noun} in {total_time}"
    return BatchNotice(f"{APP_NAME} - Conversion Complete", message, failed=False)


def is_wanted(notice: BatchNotice, settings: Settings) -> bool:
    """Whether settings ask for this kind of notice."""
    if not settings.notify:
        return False
    return settings.notify_on_failure if notice.failed else settings.notify_on_success


class DesktopNotifier:
    """
    Delivers a BatchNotice to the desktop.

    notify-send is tried first when it is on PATH; plyer is the fallback.
    Delivery problems are never raised, deliver() just reports False.
    """

    def __init__(self, notify_send: Optional[str] = None):
        self.notify_send = notify_send if notify_send is not None else shutil.which("notify-send")

    def notify_send_cmd(self, notice: BatchNotice) -> List[str]:
        return [
            self.notify_send or "notify-send",
            f"--urgency={notice.urgency}",
            f"--app-name={APP_NAME}",
            f"--icon={notice.icon}",
            f"--expire-time={EXPIRE_SECONDS * 1000}",
            notice.title,
            notice.message,
        ]

    def deliver(self, notice: BatchNotice) -> bool:
        return self._via_notify_send(notice) or self._via_plyer(notice)

    def _via_notify_send(self, notice: BatchNotice) -> bool:
        if not self.notify_send:
            return False
        try:
            subprocess.run(self.notify_send_cmd(notice), check=True, capture_output=True, timeout=5)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
            return False
        return True

    def _via_plyer(self, notice: BatchNotice) -> bool:
        try:
            from plyer import notification
        except ImportError:
            return False

        try:
            notification.notify(
                title=notice.title,
                message=notice.message,
                app_name=APP_NAME,
                timeout=EXPIRE_SECONDS,
            )
        except Exception:
            # plyer raises backend-specific errors (NotImplementedError, dbus errors, ...)
            return False
        return True


def notify_batch(
    converted: int,
    failed: int,
    elapsed: float,
    settings: Settings,
    notifier: Optional[DesktopNotifier] = None,
) -> bool:
    """
    Notify the operator that the batch finished, if settings ask for it.

    Returns:
        True if a notice was delivered.
    """
    notice = batch_notice(converted, failed, elapsed)
    if not is_wanted(notice, settings):
        return False
    if notifier is None:
        notifier = DesktopNotifier()
    return notifier.deliver(notice)
