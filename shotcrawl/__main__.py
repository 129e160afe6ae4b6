from shotcrawl.cli import main

main()
