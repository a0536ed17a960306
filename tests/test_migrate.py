# tests/test_migrate.py
from boarding_mess.core.settings import settings
from boarding_mess.scripts import migrate


def test_upgrade_uses_configured_database_url(mocker) -> None:
    upgrade = mocker.patch.object(migrate.command, "upgrade")

    migrate.run_upgrade_head()

    cfg, revision = upgrade.call_args.args
    assert revision == "head"
    assert cfg.get_main_option("sqlalchemy.url") == settings.effective_database_url
