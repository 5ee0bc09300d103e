"""Gestión de la cuenta del sistema que posee y ejecuta el servidor."""

from __future__ import annotations

from pathlib import Path

from core.config import AppSettings
from core.domain.errors import AccountCreateError, AccountError, ExternalCommandError
from core.domain.models import AccountIdentity, ExistingAccountPolicy
from core.interfaces.reporter import Reporter
from core.interfaces.system_ops import SystemOps
from core.services.steps import attempt


class AccountManager:
    """Crea/verifica la cuenta y deja su home con dueño y permisos correctos.

    Cada paso es precondición del siguiente: crear, resolver identidad,
    re-home, chown recursivo, chmod recursivo.
    """

    def __init__(self, *, settings: AppSettings, system_ops: SystemOps, reporter: Reporter) -> None:
        self.settings = settings
        self.system_ops = system_ops
        self.reporter = reporter.bind(component="accounts")

    def ensure_account(self, user_id: str, home: Path) -> AccountIdentity | None:
        if self.system_ops.account_exists(user_id):
            if self.settings.existing_account_policy is ExistingAccountPolicy.FAIL:
                raise AccountCreateError(
                    f"account {user_id!r} already exists (existing_account_policy=fail)"
                )
            self.reporter.report("account.reused", user=user_id)
        else:
            try:
                self.system_ops.create_account(user_id, home, self.settings.login_shell)
            except ExternalCommandError as exc:
                raise AccountCreateError(f"useradd failed for {user_id!r}: {exc}") from exc
            self.reporter.report("account.created", user=user_id, home=str(home))

        identity = attempt(
            self.reporter,
            "account_lookup",
            self.settings.account_lookup_policy,
            lambda: self.system_ops.lookup_account(user_id),
        )
        if identity is not None:
            self.reporter.report("account.resolved", user=user_id, uid=identity.uid, gid=identity.gid)

        try:
            self.system_ops.set_home(user_id, home)
        except ExternalCommandError as exc:
            raise AccountError(f"usermod failed for {user_id!r}: {exc}") from exc
        self.reporter.report("account.home_set", user=user_id, home=str(home))

        self.apply_ownership(home, user_id)
        return identity

    def apply_ownership(self, path: Path, owner: str) -> None:
        """`chown -R owner:owner` y luego `chmod -R` con `home_mode` (sin sticky bit)."""

        try:
            self.system_ops.chown(path, owner, recursive=True)
            self.system_ops.chmod(path, self.settings.home_mode, recursive=True)
        except ExternalCommandError as exc:
            raise AccountError(f"cannot set ownership of {path} to {owner!r}: {exc}") from exc
        self.reporter.report("account.ownership_applied", path=str(path), owner=owner, mode=f"{self.settings.home_mode:04o}")
