"""Request variants accepted from websites and the application site.

The set of requests is closed: each variant is a pydantic model tagged by
``method`` and the whole set is one discriminated union. Payloads are
validated here, once; handlers receive typed requests and never re-check
their shape.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)

from maskvault.core.exceptions import InvalidInputError
from maskvault.identity.models import SiteSession, canonical_origin


def _decode_hex(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return bytes.fromhex(value.removeprefix("0x"))
        except ValueError as e:
            raise ValueError(f"not a hex string: {e}") from e
    return value


CanonicalOrigin = Annotated[str, AfterValidator(canonical_origin)]
IdentityId = Annotated[int, Field(ge=0)]
HexBytes = Annotated[bytes, BeforeValidator(_decode_hex)]


class RequestModel(BaseModel):
    """Base class of every request variant."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Protected requests are only accepted from the application site.
    protected: ClassVar[bool] = False


# =============================================================================
# Site session bodies
# =============================================================================


class OriginSiteSessionBody(BaseModel):
    type: Literal["origin"]
    origin: CanonicalOrigin
    identity_id: IdentityId

    def to_site_session(self) -> SiteSession:
        return SiteSession(kind="origin", identity_id=self.identity_id, origin=self.origin)


class CanisterSiteSessionBody(BaseModel):
    type: Literal["canister"]
    canister_id: str = Field(..., min_length=1)
    identity_id: IdentityId

    def to_site_session(self) -> SiteSession:
        return SiteSession(kind="canister", identity_id=self.identity_id, canister_id=self.canister_id)


SiteSessionBody = Annotated[OriginSiteSessionBody | CanisterSiteSessionBody, Field(discriminator="type")]


# =============================================================================
# Protected requests
# =============================================================================


class IdentityAddRequest(RequestModel):
    """Create a new mask on an origin."""

    protected: ClassVar[bool] = True
    method: Literal["identity_add"] = "identity_add"
    to_origin: CanonicalOrigin


class IdentityLoginRequest(RequestModel):
    """Log in to an origin with one of its masks or a linked origin's mask."""

    protected: ClassVar[bool] = True
    method: Literal["identity_login"] = "identity_login"
    to_origin: CanonicalOrigin
    with_identity_id: IdentityId
    with_derivation_origin: CanonicalOrigin | None = None


class IdentityGetLoginOptionsRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["identity_get_login_options"] = "identity_get_login_options"
    for_origin: CanonicalOrigin


class IdentityEditPseudonymRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["identity_edit_pseudonym"] = "identity_edit_pseudonym"
    origin: CanonicalOrigin
    identity_id: IdentityId
    new_pseudonym: str = Field(..., min_length=1, max_length=64)


class IdentityStopSessionRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["identity_stop_session"] = "identity_stop_session"
    origin: CanonicalOrigin


class IdentityUnlinkOneRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["identity_unlink_one"] = "identity_unlink_one"
    origin: CanonicalOrigin
    with_origin: CanonicalOrigin


class IdentityUnlinkAllRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["identity_unlink_all"] = "identity_unlink_all"
    origin: CanonicalOrigin


class StateGetAllOriginDataRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["state_get_all_origin_data"] = "state_get_all_origin_data"


class StateGetSiteSessionRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["state_get_site_session"] = "state_get_site_session"


class StateSetSiteSessionRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["state_set_site_session"] = "state_set_site_session"
    session: SiteSessionBody | None = None


class StatisticsGetRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["statistics_get"] = "statistics_get"


class StatisticsResetRequest(RequestModel):
    protected: ClassVar[bool] = True
    method: Literal["statistics_reset"] = "statistics_reset"


# =============================================================================
# Public requests
# =============================================================================


class IdentitySignRequest(RequestModel):
    """Sign a challenge with the mask worn on the calling origin."""

    method: Literal["identity_sign"] = "identity_sign"
    challenge: HexBytes
    salt: HexBytes | None = None


class IdentityGetPublicKeyRequest(RequestModel):
    method: Literal["identity_get_public_key"] = "identity_get_public_key"
    salt: HexBytes | None = None


class IdentityLogoutRequest(RequestModel):
    method: Literal["identity_logout_request"] = "identity_logout_request"


class IdentityLinkRequest(RequestModel):
    """Ask the user to expose the caller's masks to ``with_origin``."""

    method: Literal["identity_link_request"] = "identity_link_request"
    with_origin: CanonicalOrigin


class IdentityUnlinkRequest(RequestModel):
    method: Literal["identity_unlink_request"] = "identity_unlink_request"
    with_origin: CanonicalOrigin


class IdentityGetLinksRequest(RequestModel):
    method: Literal["identity_get_links"] = "identity_get_links"


class IdentitySessionExistsRequest(RequestModel):
    method: Literal["identity_session_exists"] = "identity_session_exists"


Request = Annotated[
    IdentityAddRequest
    | IdentityLoginRequest
    | IdentityGetLoginOptionsRequest
    | IdentityEditPseudonymRequest
    | IdentityStopSessionRequest
    | IdentityUnlinkOneRequest
    | IdentityUnlinkAllRequest
    | StateGetAllOriginDataRequest
    | StateGetSiteSessionRequest
    | StateSetSiteSessionRequest
    | StatisticsGetRequest
    | StatisticsResetRequest
    | IdentitySignRequest
    | IdentityGetPublicKeyRequest
    | IdentityLogoutRequest
    | IdentityLinkRequest
    | IdentityUnlinkRequest
    | IdentityGetLinksRequest
    | IdentitySessionExistsRequest,
    Field(discriminator="method"),
]

_request_adapter: TypeAdapter[Request] = TypeAdapter(Request)


def parse_request(payload: Any) -> RequestModel:
    """Validate a raw payload into its request variant.

    Raises:
        InvalidInputError: If the payload matches no variant or a field is invalid.
    """
    try:
        return _request_adapter.validate_python(payload)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InvalidInputError(f"Invalid request: {first.get('msg', 'validation failed')}", field=loc) from e
