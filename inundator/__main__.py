from inundator.commands.root import main

main()
