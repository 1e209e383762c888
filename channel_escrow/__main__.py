from channel_escrow.adapters.web.server import main

main()
