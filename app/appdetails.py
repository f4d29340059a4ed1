import argparse

AppName = 'Trading Places'
AppVersion = '1.0.0'
AppDescription = 'Cargo trading aid for Old World river and road merchants'
AppAuthor = 'Trading Places Developers'

# This is so the packaging scripts can get the current application version
# number without importing the whole app
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Print application details')
    parser.add_argument('--name', action='store_true', help='Print application name')
    parser.add_argument('--version', action='store_true', help='Print application version')
    parser.add_argument('--description', action='store_true', help='Print application description')
    parser.add_argument('--author', action='store_true', help='Print application author')
    args = parser.parse_args()
    if args.name:
        print(AppName)
    if args.version:
        print(AppVersion)
    if args.description:
        print(AppDescription)
    if args.author:
        print(AppAuthor)
