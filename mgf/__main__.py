from mgf.cli.app import main

main()
