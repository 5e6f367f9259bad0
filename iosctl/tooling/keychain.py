"""Local signing-identity discovery through the macOS `security` tool."""

from __future__ import annotations

import logging
import re
import subprocess

from cryptography import x509
from cryptography.x509.oid import NameOID

from iosctl.core.certificates import subject_value
from iosctl.core.model import SigningIdentity

_CERTIFICATE_PREFIXES = (
    "Apple Development",
    "iPhone Developer",
    "Apple Distribution",
    "iPhone Distribution",
)
_PEM_RE = re.compile(
    rb"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----",
    re.DOTALL,
)
LOGGER = logging.getLogger(__name__)


class KeychainIdentityQuery:
    def find_development_teams(self) -> list[SigningIdentity]:
        pem = b""
        for prefix in _CERTIFICATE_PREFIXES:
            try:
                result = subprocess.run(
                    ["security", "find-certificate", "-a", "-p", "-c", prefix],
                    check=False,
                    capture_output=True,
                )
            except OSError as exc:
                LOGGER.debug("Could not query keychain certificates: %s", exc)
                return []
            if result.returncode == 0:
                pem += result.stdout
        return parse_development_teams(pem)


def parse_development_teams(pem: bytes) -> list[SigningIdentity]:
    """Extract unique (team name, team id) pairs from concatenated PEM certificates."""
    teams: list[SigningIdentity] = []
    seen: set[str] = set()
    for block in _PEM_RE.findall(pem):
        try:
            cert = x509.load_pem_x509_certificate(block)
        except ValueError as exc:
            LOGGER.debug("Skipping unreadable certificate: %s", exc)
            continue
        team = identity_from_certificate(cert)
        if team is None or team.id in seen:
            continue
        seen.add(team.id)
        teams.append(team)
    return teams


def identity_from_certificate(cert: x509.Certificate) -> SigningIdentity | None:
    team_id = subject_value(cert, NameOID.ORGANIZATIONAL_UNIT_NAME)
    if not team_id:
        return None
    name = subject_value(cert, NameOID.ORGANIZATION_NAME) or subject_value(
        cert, NameOID.COMMON_NAME
    )
    return SigningIdentity(name=name or team_id, id=team_id)