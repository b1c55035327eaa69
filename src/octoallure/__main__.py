from octoallure.cli.app import main

main()
