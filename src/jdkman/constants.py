"""
Constants and configuration values for jdkman.

This module contains all hardcoded values, URLs, timeouts, and other constants
used throughout the application.
"""

# Logging
LOGGER_NAME = "jdkman"
LOG_LEVEL_ENV_VAR = "JDKMAN_LOG_LEVEL"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = (
    "%(asctime)s - %(levelname)s - %(module)s - %(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_NAME = "jdkman.log"
LOG_FILE_MAX_BYTES = 1024 * 1024  # 1 MiB
LOG_FILE_BACKUP_COUNT = 3

# Application directories and environment overrides
APP_NAME = "jdkman"
JDKS_DIR_ENV_VAR = "JDKMAN_JDKS_DIR"
CACHE_DIR_ENV_VAR = "JDKMAN_CACHE_DIR"
CONFIG_FILE_NAME = "config.yaml"
JDKS_DIR_NAME = "jdks"
DOWNLOADS_DIR_NAME = "downloads"
HTTP_CACHE_DIR_NAME = "http-cache"

# Java
DEFAULT_JAVA_VERSION = 21
JAVA_HOME_ENV_VAR = "JAVA_HOME"
JAVA_HOME_PREFIX = "JAVA_HOME_"
RELEASE_FILE_NAME = "release"
RELEASE_VERSION_KEYS = ("JAVA_VERSION=", "JAVA_RUNTIME_VERSION=")
RELEASE_GRAALVM_KEY = "GRAALVM_VERSION="
JAVAFX_PROPERTIES = ("lib", "javafx.properties")
JAVA_HOME_PROPERTY = "java.home"

# Tags
TAG_JDK = "Jdk"
TAG_JRE = "Jre"
TAG_GRAALVM = "Graalvm"
TAG_NATIVE = "Native"
TAG_JAVAFX = "Javafx"
TAG_GA = "Ga"
TAG_EA = "Ea"

# Release status values used by the remote catalogs
RELEASE_STATUS_GA = "ga"
RELEASE_STATUS_EA = "ea"

# Install transaction and link names
DEFAULT_LINK_NAME = "default"
VERSIONED_DEFAULT_SUFFIX = "-default"
TMP_DIR_SUFFIX = ".tmp"
OLD_DIR_SUFFIX = ".old"
DELETE_ME_PREFIX = "_delete_me_"

# Provider names
PROVIDER_DEFAULT = "default"
PROVIDER_LINKED = "linked"
PROVIDER_MANAGED = "managed"
PROVIDER_CURRENT = "current"
PROVIDER_JAVAHOME = "javahome"
PROVIDER_PATH = "path"
PROVIDER_MULTIHOME = "multihome"
PROVIDER_LINUX = "linux"
PROVIDER_SDKMAN = "sdkman"
PROVIDER_SCOOP = "scoop"
PROVIDER_MISE = "mise"
PROVIDER_EXTERNAL = "external"
MINIMAL_PROVIDER_NAMES = (PROVIDER_CURRENT, PROVIDER_JAVAHOME, PROVIDER_PATH)
BASIC_PROVIDER_NAMES = (
    PROVIDER_CURRENT,
    PROVIDER_DEFAULT,
    PROVIDER_JAVAHOME,
    PROVIDER_PATH,
    PROVIDER_LINKED,
    PROVIDER_MANAGED,
)

# Well-known JDK locations
LINUX_JDKS_ROOT = "/usr/lib/jvm"
SDKMAN_JDKS_DIR = (".sdkman", "candidates", "java")
SCOOP_APPS_DIR = ("scoop", "apps")
MISE_JDKS_DIR = (".local", "share", "mise", "installs", "java")

# Installers
INSTALLER_FOOJAY = "foojay"
INSTALLER_METADATA = "metadata"
DEFAULT_INSTALLER = INSTALLER_FOOJAY

# Foojay Disco API
FOOJAY_API_BASE = "https://api.foojay.io/disco/v3.0"
FOOJAY_JDK_DOWNLOAD_URL = f"{FOOJAY_API_BASE}/directuris?"
FOOJAY_JDK_VERSIONS_URL = f"{FOOJAY_API_BASE}/packages?"
FOOJAY_DISTRIBUTIONS_URL = f"{FOOJAY_API_BASE}/distributions?"
FOOJAY_PACKAGE_REDIRECT_URL = f"{FOOJAY_API_BASE}/ids/{{package_id}}/redirect"
FOOJAY_DEFAULT_DISTRO = "temurin,aoj"

# Java Metadata API
METADATA_BASE_URL = "https://joschi.github.io/java-metadata/metadata/"
METADATA_DEFAULT_DISTRO = "temurin,adoptopenjdk"
METADATA_DEFAULT_JVM_IMPL = "hotspot"

# Network settings (in seconds)
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_READ_TIMEOUT = 30
DEFAULT_CONNECT_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.3
RETRY_STATUS_FORCELIST = (408, 429, 500, 502, 503, 504)
DEFAULT_CHUNK_SIZE = 8192
JSON_MIME_TYPE = "application/json"

# Catalog responses are cached for this long
CATALOG_CACHE_EXPIRY_HOURS = 12.0

# Archive handling
ZIP_EXTENSIONS = (".zip", ".jar")
TARGZ_EXTENSIONS = (".tar.gz", ".tgz")
MAC_JDK_SELECT_FOLDER = ("Contents", "Home")
