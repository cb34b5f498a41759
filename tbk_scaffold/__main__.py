from tbk_scaffold.cli import main

main()
