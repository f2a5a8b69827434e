"""
Storefront - retail catalog backend

- Shopper signup/login with bcrypt-hashed passwords and signed session tokens
- Per-user cart vectors guarded by the auth-token gate
- Product catalog and image uploads
"""

from storefront.core.config import StorefrontConfig, get_config, set_config

__all__ = [
    'StorefrontConfig',
    'get_config',
    'set_config',
]

__version__ = '1.0.0'
