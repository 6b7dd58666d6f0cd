from dlclient.cli import main

main()
