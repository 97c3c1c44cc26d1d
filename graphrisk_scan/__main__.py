from graphrisk_scan.cli import main

main()
