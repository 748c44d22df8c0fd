"""Run configuration domain exports."""

from .configuration_document import (
    ConfigurationDocumentError,
    parse_test_configuration,
    read_test_configuration,
    serialize_test_configuration,
)
from .configuration_models import CONFIG_FILE_NAME, TestConfiguration
from .configuration_synthesizer import (
    AmbiguousAppArtifactError,
    AppArtifactNotFoundError,
    ConfigurationFileNotFoundError,
    ConfigurationSynthesisError,
    DeviceProvider,
    locate_app_artifact,
    synthesize_test_configuration,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "TestConfiguration",
    "ConfigurationDocumentError",
    "parse_test_configuration",
    "read_test_configuration",
    "serialize_test_configuration",
    "AmbiguousAppArtifactError",
    "AppArtifactNotFoundError",
    "ConfigurationFileNotFoundError",
    "ConfigurationSynthesisError",
    "DeviceProvider",
    "locate_app_artifact",
    "synthesize_test_configuration",
]
