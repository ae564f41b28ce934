import jwt
from fastapi import Request

from learnhub.utils.exceptions import UnauthorizedException


class AuthService:
    @staticmethod
    def get_current_user(request: Request) -> str:
        decoded = AuthService._get_decoded_jwt(request)

        user_id = decoded.get("sub")
        if not user_id:
            raise UnauthorizedException("Invalid token")

        return user_id

    @staticmethod
    def _get_decoded_jwt(request: Request) -> dict:
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            raise UnauthorizedException("Authorization header missing")
        if not auth_header.startswith("Bearer "):
            raise UnauthorizedException("Invalid Authorization header format")

        token = auth_header.split(" ", 1)[1]
        # The identity provider has already verified the signature
        try:
            decoded = jwt.decode(
                token,
                options={"verify_signature": False}
            )
        except jwt.DecodeError:
            raise UnauthorizedException("Invalid token")
        return decoded
