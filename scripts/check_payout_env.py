import sys

from settings import db_configured, settings, validate_env_settings


def main() -> int:
    try:
        validate_env_settings()
    except RuntimeError as e:
        print(str(e))
        return 2

    print("All required payout env vars are set. gateway=%s mode=%s" % (settings.GATEWAY, settings.PAYPAL_MODE))
    if db_configured():
        print("Outcomes will be recorded to database %s on %s." % (settings.DB_NAME, settings.DB_HOST))
    else:
        print("DB_* not fully set; outcomes go to %s / %s." % (settings.PAYOUT_SUCCESS_LOG, settings.PAYOUT_ERRORS_LOG))
    return 0


if __name__ == "__main__":
    sys.exit(main())
