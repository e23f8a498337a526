from .config import SiteConfig, build_site_config, load_config
from .socials import SocialPlatform, social_links
from .status import get_status

__all__ = ["SiteConfig", "SocialPlatform", "build_site_config", "get_status", "load_config", "social_links"]
