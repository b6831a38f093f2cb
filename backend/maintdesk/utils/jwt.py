"""JWT Token Validation for identity-provider issued admin tokens"""
import jwt
from typing import Any, Dict, List, Optional

from ..config.settings import settings
from ..domain.errors import AuthenticationError, AuthorizationError
from ..domain.models import ActorContext
from .logger import get_logger

logger = get_logger(__name__)

ADMIN_ROLE = "admin"


class JWTValidator:
    """Shared-secret (HS256 by default) bearer token validator"""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        audience: Optional[str] = None
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.audience = audience if audience is not None else settings.jwt_audience

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry, returning the claims

        Raises:
            AuthenticationError: If token is missing or invalid
        """
        if not token:
            raise AuthenticationError("Token is missing")

        # Remove 'Bearer ' prefix if present
        if token.startswith("Bearer "):
            token = token[7:]

        options = {"verify_exp": True, "verify_aud": bool(self.audience)}
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience or None,
                options=options
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token expired")
            raise AuthenticationError("Token has expired")
        except jwt.InvalidAudienceError as e:
            logger.warning(f"Invalid token audience: {e}")
            raise AuthenticationError("Invalid token audience")
        except jwt.PyJWTError as e:
            logger.warning(f"JWT validation error: {e}")
            raise AuthenticationError(f"Invalid token: {str(e)}")

    def get_actor_context(self, token: str) -> ActorContext:
        """Extract the acting user from a validated token"""
        claims = self.validate_token(token)

        email = (
            claims.get("email") or
            claims.get("preferred_username") or
            claims.get("sub") or
            ""
        )
        if not email:
            logger.warning(f"No email found in token claims. Available claims: {list(claims.keys())}")
            raise AuthenticationError("Unable to determine user email from token")

        return ActorContext(
            email=email,
            display_name=claims.get("name", email),
            roles=_roles(claims)
        )


def _roles(claims: Dict[str, Any]) -> List[str]:
    roles = claims.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    role = claims.get("role")
    if role:
        roles = list(roles) + [role]
    return [str(r) for r in roles]


def is_admin(actor: ActorContext) -> bool:
    """Admin when listed in ADMIN_EMAILS or carrying the admin role claim"""
    if actor.email.lower() in settings.admin_emails_list:
        return True
    return any(role.lower() == ADMIN_ROLE for role in actor.roles)


# Global validator instance
_jwt_validator: Optional[JWTValidator] = None


def get_jwt_validator() -> JWTValidator:
    """Get global JWT validator instance"""
    global _jwt_validator
    if _jwt_validator is None:
        _jwt_validator = JWTValidator()
    return _jwt_validator


def get_current_user(authorization: str) -> ActorContext:
    """Get current user from authorization header"""
    if not authorization:
        raise AuthenticationError("Authorization header is missing")
    return get_jwt_validator().get_actor_context(authorization)


def get_current_admin(authorization: str) -> ActorContext:
    """Current user, refused unless they are an administrator"""
    actor = get_current_user(authorization)
    if not is_admin(actor):
        logger.warning(f"Non-admin access refused: {actor.email}", extra={"actor_email": actor.email})
        raise AuthorizationError("Administrator access required", details={"email": actor.email})
    return actor
