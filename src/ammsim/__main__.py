from ammsim.main import main

main()
