from django.db import migrations, models


def approve_existing_accounts(apps, schema_editor):
    User = apps.get_model("authentication", "User")
    User.objects.update(status="approved")


class Migration(migrations.Migration):

    dependencies = [
        ("authentication", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="user",
            name="status",
            field=models.CharField(
                choices=[
                    ("pending", "Pending"),
                    ("approved", "Approved"),
                    ("rejected", "Rejected"),
                ],
                db_index=True,
                default="pending",
                help_text="Account review state. Only approved accounts can sign in.",
                max_length=10,
            ),
        ),
        migrations.AddField(
            model_name="user",
            name="verified",
            field=models.BooleanField(default=False, help_text="Admin-granted verified badge"),
        ),
        migrations.AddField(
            model_name="user",
            name="bio",
            field=models.TextField(blank=True, max_length=500),
        ),
        migrations.AddField(
            model_name="user",
            name="country",
            field=models.CharField(blank=True, max_length=100),
        ),
        migrations.AddField(
            model_name="user",
            name="city",
            field=models.CharField(blank=True, max_length=100),
        ),
        # Accounts created before review existed keep signing in
        migrations.RunPython(approve_existing_accounts, migrations.RunPython.noop),
    ]
