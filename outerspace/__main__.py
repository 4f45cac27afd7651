from outerspace.pipeline import main

main()
