from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("room", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="hotelsettings",
            name="price_change_notifications",
            field=models.BooleanField(default=False),
        ),
        migrations.AddField(
            model_name="hotelsettings",
            name="price_change_recipients",
            field=models.JSONField(blank=True, default=list),
        ),
    ]
