from hvmemcalc.cli import main

main()
