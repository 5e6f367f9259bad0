"""Signing mode resolution and decoding of signing material from the environment."""

from __future__ import annotations

import base64
import binascii
import logging
import plistlib
from collections.abc import Mapping

from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from iosctl.core.certificates import subject_value
from iosctl.core.errors import SigningCredentialError
from iosctl.core.model import ProvisioningProfile, SigningConfig, SigningCredential, SigningMode

CERTIFICATE_ENV_VAR_NAME = "IOS_CERTIFICATE"
CERTIFICATE_PASSWORD_ENV_VAR_NAME = "IOS_CERTIFICATE_PASSWORD"
MOBILE_PROVISION_ENV_VAR_NAME = "IOS_MOBILE_PROVISION"
_PLIST_START = b"<?xml"
_PLIST_END = b"</plist>"
LOGGER = logging.getLogger(__name__)


def resolve_signing(
    credential: SigningCredential | None,
    profile: ProvisioningProfile | None,
) -> SigningConfig:
    """Map available signing material to a signing configuration.

    Manual signing needs both a credential and a provisioning profile. Any
    other combination signs automatically, and a profile on its own
    contributes nothing.
    """
    if credential is None:
        return SigningConfig(mode=SigningMode.AUTOMATIC)
    if profile is None:
        return SigningConfig(
            mode=SigningMode.AUTOMATIC,
            identity=credential.identity,
            team_id=credential.team_id,
        )
    return SigningConfig(
        mode=SigningMode.MANUAL,
        identity=credential.identity,
        team_id=credential.team_id,
        provisioning_profile_uuid=profile.uuid,
    )


def _b64decode(value: str, *, what: str) -> bytes:
    try:
        return base64.b64decode("".join(value.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SigningCredentialError(f"{what} is not valid base64: {exc}") from exc


def credential_from_pkcs12(data: bytes, password: str) -> SigningCredential:
    try:
        _key, cert, _extra = pkcs12.load_key_and_certificates(data, password.encode("utf-8"))
    except ValueError as exc:
        raise SigningCredentialError(f"Could not decode signing certificate: {exc}") from exc
    if cert is None:
        raise SigningCredentialError("Signing certificate bundle does not contain a certificate")

    identity = subject_value(cert, NameOID.COMMON_NAME)
    if not identity:
        raise SigningCredentialError("Signing certificate has no common name")
    return SigningCredential(
        identity=identity,
        team_id=subject_value(cert, NameOID.ORGANIZATIONAL_UNIT_NAME),
    )


def profile_from_bytes(data: bytes) -> ProvisioningProfile:
    """Read a provisioning profile, either raw plist or its signed CMS envelope."""
    start = data.find(_PLIST_START)
    end = data.find(_PLIST_END, start)
    if start == -1 or end == -1:
        raise SigningCredentialError("Provisioning profile does not embed a property list")
    try:
        doc = plistlib.loads(data[start : end + len(_PLIST_END)])
    except (plistlib.InvalidFileException, ValueError) as exc:
        raise SigningCredentialError(f"Could not parse provisioning profile: {exc}") from exc
    if not isinstance(doc, dict):
        raise SigningCredentialError("Provisioning profile root must be a dictionary")

    uuid = doc.get("UUID")
    if not isinstance(uuid, str) or not uuid:
        raise SigningCredentialError("Provisioning profile has no UUID")
    teams = doc.get("TeamIdentifier")
    team_id = teams[0] if isinstance(teams, list) and teams else None
    name = doc.get("Name")
    return ProvisioningProfile(
        uuid=uuid,
        name=name if isinstance(name, str) else None,
        team_id=team_id if isinstance(team_id, str) else None,
    )


def signing_from_env(
    env: Mapping[str, str],
) -> tuple[SigningCredential | None, ProvisioningProfile | None]:
    credential: SigningCredential | None = None
    certificate = env.get(CERTIFICATE_ENV_VAR_NAME)
    password = env.get(CERTIFICATE_PASSWORD_ENV_VAR_NAME)
    if certificate and password is not None:
        credential = credential_from_pkcs12(
            _b64decode(certificate, what=CERTIFICATE_ENV_VAR_NAME),
            password,
        )
        LOGGER.debug("Loaded signing identity %s", credential.identity)

    profile: ProvisioningProfile | None = None
    provision = env.get(MOBILE_PROVISION_ENV_VAR_NAME)
    if provision:
        profile = profile_from_bytes(_b64decode(provision, what=MOBILE_PROVISION_ENV_VAR_NAME))
        LOGGER.debug("Loaded provisioning profile %s", profile.uuid)

    return credential, profile
