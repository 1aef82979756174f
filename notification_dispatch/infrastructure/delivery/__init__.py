"""Outbound delivery of messages."""

from .dispatcher import MessageDispatcher, message_dispatcher
from .email import SendGridEmailSender, render_message_html, send_email
from .senders import LoggingSender, MessageSender, default_senders

__all__ = [
    "MessageDispatcher",
    "message_dispatcher",
    "SendGridEmailSender",
    "render_message_html",
    "send_email",
    "LoggingSender",
    "MessageSender",
    "default_senders",
]
