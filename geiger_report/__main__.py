from geiger_report.cli import main

main()
