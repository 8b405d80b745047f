"""Mock of the upstream services used by the banner service."""
