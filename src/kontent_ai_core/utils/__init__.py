from .sanitizer import mask_sensitive_data, mask_headers, mask_url, add_sensitive_keys

__all__ = ["mask_sensitive_data", "mask_headers", "mask_url", "add_sensitive_keys"]
