# Generated manually for standalone django-tld-pricing package

import django.db.models.deletion
from django.db import migrations, models


def superseded_by(model):
    return models.ForeignKey(
        blank=True,
        editable=False,
        help_text="Open interval that closed this one; reopened if that interval is withdrawn",
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name="+",
        to=f"django_tld_pricing.{model}",
    )


class Migration(migrations.Migration):

    dependencies = [
        ("django_tld_pricing", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="costpricing",
            name="superseded_by",
            field=superseded_by("costpricing"),
        ),
        migrations.AddField(
            model_name="salespricing",
            name="superseded_by",
            field=superseded_by("salespricing"),
        ),
        migrations.AddField(
            model_name="resellerdiscount",
            name="superseded_by",
            field=superseded_by("resellerdiscount"),
        ),
    ]
