"""archgen -- clean architecture project generator for Java/Gradle services."""

__version__ = "0.1.0"
