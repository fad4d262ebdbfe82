from lift_kiosk.main import main

main()
