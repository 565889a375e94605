"""
Tapp e-mail package.

Modules:
- client: EmailClient for sending e-mail through the Resend HTTP API
- templates: HTML bodies for transactional messages
"""
