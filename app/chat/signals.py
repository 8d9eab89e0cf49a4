"""
Chat notification signals.

Fired after the transaction that stored a message commits, so receivers
never observe a message that was rolled back. Delivery (push, websocket
fan-out, notification rows) is left to receivers outside the chat app.

Signals:
    direct_message_sent: kwargs message (DirectMessage), recipient_id (int)
    group_message_sent: kwargs message (GroupMessage), group_id (int)

Usage:
    from django.dispatch import receiver
    from chat.signals import direct_message_sent

    @receiver(direct_message_sent)
    def notify_recipient(sender, message, recipient_id, **kwargs):
        ...
"""

from django.dispatch import Signal

direct_message_sent = Signal()

group_message_sent = Signal()
