import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Group",
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
                (
                    "visibility",
                    models.CharField(
                        choices=[("active", "Active"), ("hidden", "Hidden")],
                        db_index=True,
                        default="active",
                        help_text="Whether this record is visible (active) or hidden",
                        max_length=10,
                    ),
                ),
                (
                    "hidden_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Timestamp when this record was hidden",
                        null=True,
                    ),
                ),
                (
                    "name",
                    models.CharField(help_text="Group display name", max_length=100),
                ),
                (
                    "description",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Optional group description",
                        max_length=500,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who created the group",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_groups",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_group",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["visibility", "-created_at"],
                        name="msg_group_visible_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Membership",
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
                (
                    "joined_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the user joined the group",
                    ),
                ),
                (
                    "left_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the membership ended (null if still active)",
                        null=True,
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Whether this membership currently grants access",
                    ),
                ),
                (
                    "group",
                    models.ForeignKey(
                        help_text="Group this membership belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="messaging.group",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Member of the group",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="group_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_membership",
                "ordering": ["joined_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["group", "is_active"],
                        name="msg_member_group_active_idx",
                    ),
                    models.Index(
                        fields=["user", "is_active"],
                        name="msg_member_user_active_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("group", "user"),
                        name="unique_active_membership",
                    )
                ],
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
                (
                    "visibility",
                    models.CharField(
                        choices=[("active", "Active"), ("hidden", "Hidden")],
                        db_index=True,
                        default="active",
                        help_text="Whether this record is visible (active) or hidden",
                        max_length=10,
                    ),
                ),
                (
                    "hidden_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Timestamp when this record was hidden",
                        null=True,
                    ),
                ),
                ("body", models.TextField(help_text="Message text")),
                (
                    "sent_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the message was posted",
                    ),
                ),
                (
                    "group",
                    models.ForeignKey(
                        help_text="Group the message was posted to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="messaging.group",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Member who posted the message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="group_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_group_message",
                "ordering": ["-sent_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["group", "visibility", "-sent_at"],
                        name="msg_gmsg_group_sent_idx",
                    )
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
                (
                    "visibility",
                    models.CharField(
                        choices=[("active", "Active"), ("hidden", "Hidden")],
                        db_index=True,
                        default="active",
                        help_text="Whether this record is visible (active) or hidden",
                        max_length=10,
                    ),
                ),
                (
                    "hidden_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Timestamp when this record was hidden",
                        null=True,
                    ),
                ),
                ("body", models.TextField(help_text="Message text")),
                (
                    "sent_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the message was sent",
                    ),
                ),
                (
                    "is_read",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the receiver has read the message",
                    ),
                ),
                (
                    "read_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the receiver read the message",
                        null=True,
                    ),
                ),
                (
                    "receiver",
                    models.ForeignKey(
                        help_text="User who received the message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_direct_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent the message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_direct_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_direct_message",
                "ordering": ["-sent_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["sender", "receiver", "-sent_at"],
                        name="msg_dm_pair_sent_idx",
                    ),
                    models.Index(
                        condition=models.Q(("visibility", "active")),
                        fields=["receiver", "is_read"],
                        name="msg_dm_receiver_unread_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("sender", models.F("receiver")), _negated=True
                        ),
                        name="direct_message_distinct_parties",
                    )
                ],
            },
        ),
    ]
