"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "node.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Node configuration template for node-bootstrap.
# Replace every <REQUIRED> placeholder before running start.
# Every value can also be supplied through the environment (UUID, ARGO_AUTH, NEZHA_SERVER, ...);
# environment values take precedence over this file.

# architecture: "x86_64"      # defaults to the host architecture
# file_root: "./tmp"          # binaries and generated daemon configuration
# http_port: 3000             # subscription server port

node:
  uuid: "<REQUIRED>"
  # name: "node"              # label shown by clients

proxy:
  # listen_port: 8001         # port the tunnel forwards to
  # edge_address: "cdns.doon.eu.org"
  # edge_port: 443

monitoring:
  # Monitoring is enabled when both server and key are set.
  # Setting port selects agent mode; leaving it empty selects legacy mode,
  # where server must carry the port itself ("host:port").
  # server: "<OPTIONAL>"
  # port: "<OPTIONAL>"
  # key: "<OPTIONAL>"

tunnel:
  # A token (or a credentials JSON document) requires the fixed domain it serves.
  # Without a token a quick tunnel is opened and its hostname is discovered at runtime.
  # token: "<OPTIONAL>"
  # domain: "<OPTIONAL>"
  # fallback_hostname: "localhost"
  # discovery_timeout_seconds: 30

subscription:
  # path: "sub"
  # encode_base64: true

# launch:
#   grace_seconds: 2
#   liveness_timeout_seconds: 10

# download:
#   timeout_seconds: 60

# artifacts:
#   sources:
#     amd64: "https://amd64.ssss.nyc.mn"
#     arm64: "https://arm64.ssss.nyc.mn"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML node configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder node configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Node configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
