from repairhub.main import main

main()
