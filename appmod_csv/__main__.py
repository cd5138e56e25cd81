from appmod_csv.cli import main

if __name__ == "__main__":
    main()
