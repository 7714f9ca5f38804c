"""Catalog constants: genres, accepted media formats, pagination bounds."""

GENRES = [
    "Pop",
    "Rock",
    "Hip-Hop",
    "Rap",
    "Jazz",
    "Classical",
    "Electronic",
    "EDM",
    "Dance",
    "Country",
    "R&B",
    "Soul",
    "Reggae",
    "Metal",
    "Blues",
    "Folk",
    "Indie",
    "Alternative",
    "Punk",
    "K-Pop",
    "Latin",
    "Bollywood",
    "Instrumental",
    "Other",
]

ALLOWED_AUDIO_TYPES = frozenset({"audio/mpeg", "audio/wav", "audio/ogg", "audio/mp4", "audio/x-m4a"})
ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})

ALLOWED_AUDIO_EXTENSIONS = (".mp3", ".wav", ".ogg", ".m4a")
ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

DEFAULT_AUDIO_CONTENT_TYPE = "audio/mpeg"
DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

SORT_FIELDS = ("createdAt", "plays", "title", "artist")
SORT_ORDERS = ("asc", "desc")

TITLE_MAX_LENGTH = 200
ARTIST_MAX_LENGTH = 100
ALBUM_MAX_LENGTH = 200
