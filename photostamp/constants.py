SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff"}

OUTPUT_SUFFIX = "_processed"
OUTPUT_EXTENSION = ".jpg"
ARCHIVE_NAME = "generated_images.zip"
OUTPUT_DIR_NAME = "generated_images"
TEMPLATE_IMAGES_DIR_NAME = "template_images"

CAPTION_PREFIX = "N°"
DEFAULT_CAPTION_COLOR = "#000000"
DEFAULT_JPEG_QUALITY = 92

APP_NAME = "PhotoStamp"
DATABASE_FILE_NAME = "photo_template.db"
