"""WeChat OAuth2 domain."""
