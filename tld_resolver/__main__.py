from tld_resolver.cli import main

main()
