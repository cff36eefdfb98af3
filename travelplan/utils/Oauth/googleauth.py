from authlib.integrations.starlette_client import OAuth
from travelplan.core.config import settings
import secrets

def generate_nonce(length: int = 32) -> str:
    return secrets.token_urlsafe(length)

oauth = OAuth()

# Google sign-in is optional; the routes are only mounted when this is registered
if settings.google_enabled:
    oauth.register(
        name='google',
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
        client_kwargs={'scope': 'openid email profile'},
    )
