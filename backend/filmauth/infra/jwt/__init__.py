from .flask_jwt_token_codec import FlaskJWTTokenCodec, validate_signing_key

__all__ = ["FlaskJWTTokenCodec", "validate_signing_key"]
