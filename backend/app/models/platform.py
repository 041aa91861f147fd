"""Social network identifiers shared by comments and metrics."""
import enum


class Platform(str, enum.Enum):
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    WORDPRESS = "wordpress"
    PINTEREST = "pinterest"
