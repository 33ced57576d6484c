from vsi.cli.app import main

main()
