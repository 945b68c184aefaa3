# Generates the secrets the relay needs.
# Run: python manage.py <admin-password>
import sys

from gallery_admin.security import generate_token_secret, hash_password


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv or not argv[0]:
        print('Usage: python manage.py <admin-password>', file=sys.stderr)
        return 1

    password_hash, salt = hash_password(argv[0])
    print('')
    print('Add these to .env or to your platform secret store:')
    print('')
    print(f'ADMIN_PASSWORD_HASH={password_hash}')
    print(f'ADMIN_PASSWORD_SALT={salt}')
    print(f'JWT_SECRET={generate_token_secret()}')
    print('')
    print('Also set GITHUB_TOKEN (fine-grained, Contents: read/write), GITHUB_REPO and ALLOWED_ORIGIN.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
