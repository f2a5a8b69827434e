from storefront.api.server import main

main()
