"""
Initial chat schema.

Creates the direct chat tables (rooms, messages, read status) and the group
chat tables (rooms, messages, read markers) with their uniqueness and
canonical-order constraints.
"""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("groups", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DirectChatRoom",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "last_sequence",
                    models.PositiveBigIntegerField(
                        default=0,
                        help_text="Sequence value of the newest message in this room",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        editable=False,
                        help_text="When the room was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        help_text="Last activity in the room",
                    ),
                ),
                (
                    "user_low",
                    models.ForeignKey(
                        help_text="Participant with the lower user id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user_high",
                    models.ForeignKey(
                        help_text="Participant with the higher user id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_direct_room",
                "ordering": ["-updated_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_low", "user_high"),
                        name="unique_direct_room_pair",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("user_low_id__lt", models.F("user_high_id"))
                        ),
                        name="direct_room_user_low_lt_high",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DirectMessage",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "sequence",
                    models.PositiveBigIntegerField(
                        help_text="Per-room ordering key (strictly increasing)"
                    ),
                ),
                (
                    "message_type",
                    models.CharField(
                        choices=[("TEXT", "Text"), ("IMAGE", "Image"), ("FILE", "File")],
                        default="TEXT",
                        help_text="Kind of payload",
                        max_length=10,
                    ),
                ),
                (
                    "body",
                    models.TextField(blank=True, help_text="Text content", null=True),
                ),
                (
                    "file_url",
                    models.CharField(
                        blank=True,
                        help_text="Location of the attached file or image",
                        max_length=500,
                        null=True,
                    ),
                ),
                (
                    "file_name",
                    models.CharField(
                        blank=True,
                        help_text="Original name of the attached file",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "file_size",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Size of the attached file in bytes",
                        null=True,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        editable=False,
                        help_text="When the message was stored",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        help_text="Room this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.directchatroom",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_direct_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_direct_message",
                "ordering": ["-sequence"],
                "indexes": [
                    models.Index(
                        fields=["room", "sender", "sequence"],
                        name="chat_dm_room_sender_seq_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("room", "sequence"),
                        name="unique_direct_message_sequence",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DirectReadStatus",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "last_read_sequence",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Sequence of the newest acknowledged message",
                        null=True,
                    ),
                ),
                (
                    "last_read_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the pointer last moved",
                    ),
                ),
                (
                    "last_read_message",
                    models.ForeignKey(
                        blank=True,
                        help_text="Newest message the user has acknowledged",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="chat.directmessage",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        help_text="Room being tracked",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="read_statuses",
                        to="chat.directchatroom",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Reader",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="direct_read_statuses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_direct_read_status",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("room", "user"), name="unique_direct_read_status"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="GroupChatRoom",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "is_deleted",
                    models.BooleanField(
                        db_index=True,
                        default=False,
                        help_text="Whether this record has been soft deleted",
                    ),
                ),
                (
                    "deleted_at",
                    models.DateTimeField(
                        blank=True,
                        null=True,
                        help_text="Timestamp when this record was soft deleted",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                ("name", models.CharField(help_text="Room display name", max_length=100)),
                (
                    "is_admin_room",
                    models.BooleanField(
                        default=False,
                        help_text="Whether only admins may use this room",
                    ),
                ),
                (
                    "group",
                    models.ForeignKey(
                        help_text="Group this room belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chat_rooms",
                        to="groups.group",
                    ),
                ),
            ],
            options={
                "db_table": "chat_group_room",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="GroupMessage",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("body", models.TextField(help_text="Message text")),
                (
                    "read_count",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Distinct users who have read this message",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        editable=False,
                        help_text="When the message was stored",
                    ),
                ),
                (
                    "reply_to",
                    models.ForeignKey(
                        blank=True,
                        help_text="Message this one replies to (same room)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="replies",
                        to="chat.groupmessage",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        help_text="Room this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.groupchatroom",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_group_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_group_message",
                "ordering": ["-id"],
                "indexes": [
                    models.Index(fields=["room", "-id"], name="chat_gm_room_id_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="GroupMessageRead",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "read_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the user first read the message",
                    ),
                ),
                (
                    "message",
                    models.ForeignKey(
                        help_text="Message that was read",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reads",
                        to="chat.groupmessage",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Reader",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="group_message_reads",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_group_message_read",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("message", "user"), name="unique_group_message_read"
                    )
                ],
            },
        ),
    ]
