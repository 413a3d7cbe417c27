"""Model of an NFC figure service: decrypted amiibo dumps, tag state and IPC command handling."""

__version__ = "0.1.0"