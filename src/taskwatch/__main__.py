from taskwatch.cli import main

main()
