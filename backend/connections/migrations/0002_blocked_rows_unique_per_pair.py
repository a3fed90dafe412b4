from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('connections', '0001_initial'),
    ]

    operations = [
        migrations.RemoveConstraint(
            model_name='connection',
            name='one_open_connection_per_pair',
        ),
        migrations.AddConstraint(
            model_name='connection',
            constraint=models.UniqueConstraint(condition=models.Q(('status__in', ['pending', 'accepted', 'blocked'])), fields=('pair_key',), name='one_current_connection_per_pair'),
        ),
    ]
