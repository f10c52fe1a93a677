"""Node access: configuration, JSON-RPC transport and the parse client."""
