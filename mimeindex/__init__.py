"""Parse RFC 822 messages into MIME trees and build IMAP BODYSTRUCTURE data."""

__version__ = "0.1.0"
__all__ = ["bodystructure", "parser"]