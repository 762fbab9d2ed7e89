"""Combined API key parsing."""

from __future__ import annotations

from dataclasses import dataclass

KEY_DELIMITER = "#"


@dataclass(frozen=True)
class Credential:
    tenant_id: str
    secret_key: str

    def __repr__(self) -> str:
        masked = "***" if self.secret_key else ""
        return f"Credential(tenant_id={self.tenant_id!r}, secret_key={masked!r})"


def parse_api_key(combined_key: str) -> Credential:
    """Split ``"<tenant_id>#<secret_key>"`` on the first ``#``.

    A key without the delimiter resolves to two empty fields; the service
    rejects the tenant later, at submission time.
    """

    tenant_id, sep, secret_key = (combined_key or "").partition(KEY_DELIMITER)
    if not sep:
        return Credential(tenant_id="", secret_key="")
    return Credential(tenant_id=tenant_id, secret_key=secret_key)


__all__ = ["Credential", "KEY_DELIMITER", "parse_api_key"]
