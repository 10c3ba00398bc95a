import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

ROLE_CHOICES = [("coach", "Coach"), ("player", "Player"), ("scout", "Scout")]
TYPE_CHOICES = [("text", "Text"), ("image", "Image"), ("file", "File")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Conversation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("coach_role", models.CharField(choices=ROLE_CHOICES, default="coach", help_text="Role of the coach-slot participant (coach or scout)", max_length=10)),
                ("initiated_by_role", models.CharField(choices=ROLE_CHOICES, help_text="Role of the user who opened the conversation", max_length=10)),
                ("is_unlocked", models.BooleanField(default=False, help_text="Whether the player may send messages")),
                ("has_player_replied", models.BooleanField(default=False, help_text="Set once the player has sent a message")),
                ("has_coach_replied", models.BooleanField(default=False, help_text="Set once the coach-slot participant has sent a message")),
                ("last_message_text", models.TextField(blank=True, help_text="Text of the newest message")),
                ("last_message_type", models.CharField(blank=True, choices=TYPE_CHOICES, help_text="Type of the newest message", max_length=10)),
                ("last_message_file_name", models.CharField(blank=True, help_text="Original file name of the newest attachment", max_length=255)),
                ("last_message_sender_role", models.CharField(blank=True, choices=ROLE_CHOICES, help_text="Role of the sender of the newest message", max_length=10)),
                ("last_message_at", models.DateTimeField(blank=True, help_text="Timestamp of the newest message", null=True)),
                (
                    "coach",
                    models.ForeignKey(
                        help_text="Coach or scout participant",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="coach_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "player",
                    models.ForeignKey(
                        help_text="Player participant",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="player_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "initiated_by",
                    models.ForeignKey(
                        help_text="User who opened the conversation",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="initiated_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "last_message_sender",
                    models.ForeignKey(
                        blank=True,
                        help_text="Sender of the newest message",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "deleted_for",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Participants who removed this conversation from their list",
                        related_name="hidden_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_conversation",
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(fields=["player", "-updated_at"], name="chat_conver_player__6f2b1c_idx"),
                    models.Index(fields=["coach", "-updated_at"], name="chat_conver_coach_i_3d8e4a_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("coach", "player"), name="unique_coach_player_conversation"),
                    models.CheckConstraint(
                        condition=models.Q(("coach", models.F("player")), _negated=True),
                        name="conversation_distinct_participants",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("sender_role", models.CharField(choices=ROLE_CHOICES, help_text="Role of the sender inside the conversation", max_length=10)),
                ("message_type", models.CharField(choices=TYPE_CHOICES, default="text", help_text="Content type of the message", max_length=10)),
                ("text", models.TextField(blank=True, help_text="Message text (caption for attachments)")),
                ("attachment", models.FileField(blank=True, help_text="Uploaded image or document", upload_to="chat/attachments/%Y/%m/")),
                ("file_name", models.CharField(blank=True, help_text="Original name of the uploaded file", max_length=255)),
                ("file_size", models.PositiveIntegerField(blank=True, help_text="Attachment size in bytes", null=True)),
                ("is_read", models.BooleanField(db_index=True, default=False, help_text="Whether the receiver has read the message")),
                ("read_at", models.DateTimeField(blank=True, help_text="When the receiver read the message", null=True)),
                (
                    "conversation",
                    models.ForeignKey(
                        help_text="Conversation this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.conversation",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent the message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "receiver",
                    models.ForeignKey(
                        help_text="The other participant at send time",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["conversation", "-created_at"], name="chat_messag_convers_9a41e7_idx"),
                    models.Index(fields=["receiver", "is_read"], name="chat_messag_receive_52c0fd_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("sender", models.F("receiver")), _negated=True),
                        name="message_sender_not_receiver",
                    ),
                ],
            },
        ),
    ]
