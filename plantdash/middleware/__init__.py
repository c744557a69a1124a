"""Request middleware: authentication, validation and error handling."""
