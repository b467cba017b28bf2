import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="NotificationRecord",
            fields=[
                (
                    "event_id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique notification identifier. Enforces idempotency.",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "sequence",
                    models.PositiveBigIntegerField(
                        help_text="Commit order, starting at 1.",
                        unique=True,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        help_text="Namespaced type, e.g. tier_discount.policy.set.v1.",
                        max_length=255,
                    ),
                ),
                ("event_version", models.PositiveSmallIntegerField()),
                (
                    "program_id",
                    models.BigIntegerField(
                        blank=True,
                        help_text="Program the notification concerns. Null for ownership changes.",
                        null=True,
                    ),
                ),
                ("actor_id", models.CharField(max_length=255)),
                ("payload", models.JSONField()),
                (
                    "created_at",
                    models.DateTimeField(help_text="Timestamp from the engine clock."),
                ),
                ("received_at", models.DateTimeField(auto_now_add=True)),
                ("previous_event_hash", models.CharField(max_length=64, unique=True)),
                ("event_hash", models.CharField(max_length=64)),
            ],
            options={
                "db_table": "tierseal_notification_log",
                "ordering": ["sequence"],
                "indexes": [
                    models.Index(
                        fields=["program_id", "sequence"],
                        name="idx_ntf_program_seq",
                    ),
                    models.Index(fields=["event_type"], name="idx_ntf_type"),
                ],
            },
        ),
    ]
