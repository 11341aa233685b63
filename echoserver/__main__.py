from echoserver.app import main

main()
